"""
시르쿨로 미디어 업로드 백엔드
"""
