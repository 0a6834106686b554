"""
appengine_deploy
----------------

Google App Engine 배포용 CLI 패키지.
deliverables 로 지정한 app.yaml 에 환경변수를 병합해 gcloud app deploy 를 실행하고,
배포된 버전 정보를 CI 파이프라인 출력값으로 내보내는 것을 목표로 한다.
"""

__all__ = [
    "config",
    "orchestrator",
]
