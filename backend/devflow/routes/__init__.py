"""
DevFlow Backend: Routes Package
================================

Route Inventory:
    - pages.py:        GET  /                              (home page, HTML)
    - questions.py:    POST/GET /api/questions, GET /api/questions/{id},
                       POST /api/questions/{id}/vote
    - answers.py:      POST/GET /api/questions/{id}/answers,
                       POST /api/answers/{id}/vote
    - tags.py:         GET  /api/tags
    - collections.py:  POST /api/collections/toggle, GET /api/collections
    - accounts.py:     POST /api/accounts
    - health.py:       GET  /health

Routes stay thin: extract the request data, call a service, shape the
response. Business rules live in devflow/services/.
"""
