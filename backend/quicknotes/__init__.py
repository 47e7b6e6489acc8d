"""Quick Notes client: OTP session handling and note collection sync."""
