"""API package - routes, dependencies and middleware"""
