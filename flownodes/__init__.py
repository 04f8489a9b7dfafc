"""
flownodes - AI 워크플로우 빌더용 노드 레지스트리
"""
