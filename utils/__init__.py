"""Вспомогательные модули: даты и логирование"""
