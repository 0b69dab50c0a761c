"""
前端模块
"""
