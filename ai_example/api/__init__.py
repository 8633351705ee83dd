"""HTTP adapter package.

Architectural role:
- Defines the external interaction boundary (`/ai` routes).
- Performs transport-level validation and error translation.
- Delegates every capability call to a service resolved by qualifier.
"""
