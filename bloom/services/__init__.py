"""Collaborator seams (cipher, audit, payments, insights, auth) and the service container."""
