"""Maintenance domain - recurring maintenance tasks"""
