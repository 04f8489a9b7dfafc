"""
노드 계약, 자격증명 해석, Provider 클라이언트
"""
