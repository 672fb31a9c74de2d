"""Buildings domain - building and unit lookups"""
