"""
orderdesk.db.repositories

Repositories over the async session: users, businesses/memberships, orders.
Each takes the request-scoped `AsyncSession`; none of them commits.
"""
