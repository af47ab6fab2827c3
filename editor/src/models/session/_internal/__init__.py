"""Internal implementation for the editor session model"""
