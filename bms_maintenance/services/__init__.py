"""Batch automation jobs"""
