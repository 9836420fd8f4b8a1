"""
subtitle-overlay: 자막 오버레이 렌더러

마크업 텍스트 또는 사전 렌더링된 비트맵 자막을 화면 오버레이용 캔버스로 준비합니다.

패키지 구성:
- config: Pydantic 설정 스키마, YAML 로더
- logging: 구조화 로깅
- markup: 태그 파서, 색상 변환
- layout: 캔버스 지오메트리, 레이아웃 엔진
- raster: 래스터라이저 인터페이스, Pillow 구현
- compositor: 비트맵 자막 컴포지터
- display: 오버레이 (메모리, OpenCV 프리뷰)
- renderer: 캔버스 수명 관리 (SubtitleRenderer)
"""

__version__ = "0.1.0"
