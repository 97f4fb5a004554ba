"""Authentication, seller onboarding and route access."""
