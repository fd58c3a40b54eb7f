"""
핵심 설정 및 공통 인프라
"""
