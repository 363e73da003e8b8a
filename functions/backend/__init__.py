"""
Chat relay service for the Spark interview coach.

This package provides a FastAPI application that forwards chat history to an
LLM chat completion endpoint and optionally adds synthesized speech.
"""
