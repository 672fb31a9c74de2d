"""Domain packages - repositories, services, schemas and routers per aggregate"""
