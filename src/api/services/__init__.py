# This file marks the services package for CMS business logic modules.
# It exists so routers can depend on cohesive service classes instead of raw table access.
# Service modules isolate authorization and persistence rules from transport concerns.
# That separation makes API behavior easier to test and maintain.
