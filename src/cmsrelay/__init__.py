# cms-oauth-relay — GitHub OAuth code relay for browser-based CMS UIs.
# Created: 2026-10-18

__version__ = "0.1.0"
