"""Deck-composition editing state machine for trading-card-game decks."""
