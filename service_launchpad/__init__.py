"""
Launchpad service package.

Backs the token launch flow with:
- Honest-launch status reads (mint and freeze authority revoked), cached per mint
- Raydium CLMM pool discovery with cached negative results
- Launch fee quotes and skim accounting
- Mainnet canary restrictions on liquidity commits
- Meme kit generation behind per-client rate limits and a daily AI quota

Structure:
- app/main.py: FastAPI service and routes
- app/context.py: construction of every cache, limiter and client
- app/*: domain packages
- tests/: unit and API tests
"""
