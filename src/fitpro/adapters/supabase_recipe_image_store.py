"""Supabase Storage bucket for recipe cover images."""

from dataclasses import dataclass

from supabase import Client

from fitpro.services.recipes import RecipeImageStore


@dataclass
class SupabaseRecipeImageStore(RecipeImageStore):
    """Store recipe images in a private bucket and hand out signed URLs."""

    client: Client
    bucket: str

    def upload(self, path: str, content: bytes, content_type: str) -> None:
        """Upload an image, replacing any previous object at the same path."""
        self.client.storage.from_(self.bucket).upload(
            path,
            content,
            {"content-type": content_type, "upsert": "true"},
        )

    def signed_url(self, path: str, ttl_seconds: int) -> str:
        """Return a signed URL valid for ``ttl_seconds``."""
        response = self.client.storage.from_(self.bucket).create_signed_url(
            path, ttl_seconds
        )
        url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise RuntimeError("Failed to sign recipe image URL")
        return str(url)
