"""Banyan ERP 后端"""
