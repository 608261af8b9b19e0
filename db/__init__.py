"""Relational store access"""
