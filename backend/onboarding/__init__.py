"""Onboarding gate package

Decides, per navigation, whether a signed-in user may see a page or must first
complete the consent and inventory records. Framework-free; the FastAPI
adapter in `backend.web.main` drives it.
"""
