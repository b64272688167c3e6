"""Amazon 売れ筋ランキング (BSR) 推移トラッカー."""
