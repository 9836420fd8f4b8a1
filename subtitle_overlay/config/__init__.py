"""
설정 모듈 패키지

- schema: AppConfig 및 섹션별 Pydantic 모델
- config_manager: YAML 로드, 환경변수 오버라이드, 검증
"""
