from authcore.infra.jwt.pyjwt_token_codec import PyJWTTokenCodec, SigningKey

__all__ = ["PyJWTTokenCodec", "SigningKey"]
