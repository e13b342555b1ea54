"""
Service Organization
====================
Services are organized by role:

**ai/**
  Inference backend, prompts, response validation, retry policy and the
  advisory pipelines built on the orchestrator.

**application/**
  Services the host application calls: care-schedule views and journal
  enrichment.

Collaborator interfaces live in :mod:`plantcare.services.protocols`, wiring in
:mod:`plantcare.services.container_builder`.
"""
