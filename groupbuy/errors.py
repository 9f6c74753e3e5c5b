# -*- coding: utf-8 -*-
# Copyright (c) 2025 Jan Sarivuo

"""Palvelukerroksen virheet. Reitit muuntavat nämä HTTP-vastauksiksi."""


class StoreError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationFailed(StoreError):
    status_code = 400


class NotFoundError(StoreError):
    status_code = 404
