"""
Services layer - Business logic goes here.
Keep services focused on specific domains (incidents, comments, notifications, etc.)

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Role checks go through services.authorization, never inline
- Collaborators (geocoder, photo store, notification fan-out) are best-effort
  where the core operation can still succeed
"""
