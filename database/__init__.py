"""Хранилища документа: файл с бэкапами, память, HTTP API"""
