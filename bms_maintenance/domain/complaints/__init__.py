"""Complaints domain - tenant complaint conversion"""
