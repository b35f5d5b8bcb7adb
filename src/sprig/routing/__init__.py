"""Routing — bracket-pattern compiler, matcher, and immutable route table.

Routes are compiled once into a ``RouteTable``; a refresh builds a new
table and swaps it in, so requests never see a half-built one.
"""
