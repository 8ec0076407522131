"""Subscription service for the Innexgo exams platform."""
