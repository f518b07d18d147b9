"""Runnable example applications: a greeting, a middleware demo and a user CRUD API."""