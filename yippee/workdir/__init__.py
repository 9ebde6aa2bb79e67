"""Merging, source downloads and cleaning of PKGBUILD work directories."""