"""Вспомогательные модули.

Содержит утилиты для:
- Логирования (logging.py)
- Работы с временными зонами (timezone.py)
- Очистки base64 из логов (redaction.py)
"""
