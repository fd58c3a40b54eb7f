"""
관리자용 API
"""
