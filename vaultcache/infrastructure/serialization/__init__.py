"""Payload codecs used to turn cached values into bytes and back."""
