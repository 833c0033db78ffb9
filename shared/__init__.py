"""Pydantic-модели ответов Data API"""
