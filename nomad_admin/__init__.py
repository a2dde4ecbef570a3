"""Nomad Life admin: schema-driven content management for spaces, events, blog and feedback."""
