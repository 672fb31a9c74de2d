"""Building maintenance scheduling and work order engine"""
