"""Work orders domain - work order generation and lifecycle"""
