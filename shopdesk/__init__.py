"""Shopdesk - order, inventory and discount backend"""
