"""Роутеры aiogram"""
