"""
Feature modules.

- shared: exceptions, pure formulas, BaseService
- character: character stores (in-memory and SQL)
- realms: realm strategies and the realm registry
- attempts: ephemeral attempt tracking
- progression: reward calculation and application
- engine: GameEngine orchestrator
- challenge: ChallengeService caller surface
- analytics: analytics and adaptive-difficulty collaborators
"""
