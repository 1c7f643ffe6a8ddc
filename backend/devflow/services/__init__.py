"""
DevFlow Backend: Services Layer
================================

Service Inventory:
    - SessionProvider (abstract) / JWTSessionProvider: who is calling
    - TagService, QuestionService, AnswerService: the Q&A lifecycle
    - CollectionService: bookmarks
    - AccountService: auth provider links and password hashing

Services are stateless singletons; each method receives the request's
AsyncSession so one request is one unit of work.
"""
