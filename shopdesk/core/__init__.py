"""Configuration, database access, auth and errors"""
