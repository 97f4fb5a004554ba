"""Live booking and campaign updates over Socket.IO."""
