"""
orderdesk.api.routers

Router modules: `users` (/api/user), `orders` (/api/orders), `health` (probes).
"""
