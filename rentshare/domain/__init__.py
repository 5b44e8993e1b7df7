"""Pure booking domain rules: dates, pricing, refunds and transitions."""
