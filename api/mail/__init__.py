"""
Outbound email: the ad-hoc send endpoint and the welcome notification.
"""
