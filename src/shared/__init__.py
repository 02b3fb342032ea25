# src/shared/__init__.py
"""
Общий код между сервисами.

Модули:
- models: общие Pydantic-модели ответов
- http: CORS и обработчики ошибок FastAPI
"""

__all__: list[str] = []
