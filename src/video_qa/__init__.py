"""YouTube video question answering.

This package ingests a video's transcript into a per-video namespace of a
vector store and answers questions about the video with a language model
grounded on the most similar transcript passages.
"""
