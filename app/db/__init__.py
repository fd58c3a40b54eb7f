"""
데이터베이스 연결 및 저장소
"""
