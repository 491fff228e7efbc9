"""Core domain package for patternscope.

Core contains the catalog, descriptor, constraint and matching logic without
any file IO or presentation code, keeping the business logic portable.
"""
