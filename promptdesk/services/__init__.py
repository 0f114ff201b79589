"""
SERVICES PACKAGE
================

Business logic lives here. The API layer (promptdesk.main) calls these
services; they don't handle HTTP, only state, replies and storage.

MODULES:
    parameters       - ParameterStore: the single active ParameterSet, publish-on-change
    synthesizer      - ResponseSynthesizer: parameter-conditioned stand-in for a model
    session_store    - SessionStore: sessions, messages, derived titles
    template_library - TemplateLibrary: saved prompt templates
    persistence      - PersistenceAdapter: JSON snapshot per record
    chat_service     - ChatService: one turn end to end, admission control, cancellation
    model_catalog    - Static list of selectable models
"""
