"""Domain packages: router, service, repository and schemas per feature"""
