# This file marks the routers package for API route modules.
# It exists so import paths stay clear when registering route groups.
# Entity routes are generated from one factory; auth, dashboard, and health have their own modules.
# Keeping this module explicit helps tooling discover API code correctly.
