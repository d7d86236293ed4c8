"""Unified Catalog - product types, products and variants"""
