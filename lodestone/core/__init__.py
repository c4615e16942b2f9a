"""Core package - remote catalogs, HTTP transport and downloads"""
