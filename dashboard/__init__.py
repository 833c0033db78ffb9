"""Локальный HTTP API Rocky Tracker (FastAPI)"""
