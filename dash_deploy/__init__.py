"""
dash_deploy
-----------

웹 대시보드(정적 번들) 배포용 CLI 패키지.
Node.js 툴체인 점검, 의존성 설치, 테스트/린트/빌드, Netlify 업로드 또는
수동 업로드용 아카이브 생성까지를 하나의 명령으로 실행하는 것을 목표로 한다.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "orchestrator",
]
