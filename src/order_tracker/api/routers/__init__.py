"""
order_tracker.api.routers

HTTP routers: health probes, dashboard read model/commands, order details.
"""
